from rest_framework import status as http
from rest_framework.response import Response


def ok(data=None, message: str = '', status: int = http.HTTP_200_OK, **extra) -> Response:
    payload = {'ok': True, 'message': message, 'data': data}
    payload.update(extra)
    return Response(payload, status=status)


def validated(serializer_class, data, **kwargs) -> dict:
    s = serializer_class(data=data, **kwargs)
    s.is_valid(raise_exception=True)
    return s.validated_data
