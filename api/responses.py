"""
Success envelope: {"success": true, "data": ..., "count": n}
"""
from rest_framework import status
from rest_framework.response import Response


def envelope(data=None, count=None, status_code=status.HTTP_200_OK) -> Response:
    body = {"success": True}
    if data is not None:
        body["data"] = data
    if count is not None:
        body["count"] = count
    return Response(body, status=status_code)
