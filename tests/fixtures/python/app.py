"""
<api method="DELETE" summary="delete a user" tags="user">
    <path>/users/{id}<param name="id" type="number" /></path>
    <response status="204" mimetype="json" type="none" />
</api>
"""

# An ordinary comment.
URL = "# <api method='GET'><path>/fake</path></api>"
