from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.context import caller_from_request
from clinic.permissions import IsAdminRole
from clinic.serializers.accounts import RoleSerializer, UserListQuerySerializer
from clinic.services import accounts

from .common import ok, validated


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_list(request):
    vd = validated(UserListQuerySerializer, request.query_params)
    qs = accounts.list_users(role=vd.get('role'), q=(vd.get('q') or '').strip() or None)
    return ok([accounts.format_user(u) for u in qs])


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_role(request, user_id: int):
    vd = validated(RoleSerializer, request.data)
    user = accounts.change_role(caller_from_request(request), user_id, vd['role'])
    return ok(accounts.format_user(user), 'User role updated successfully')


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_delete(request, user_id: int):
    """Deactivate the account; its bookings and records stay."""
    user = accounts.deactivate_user(caller_from_request(request), user_id)
    return ok(accounts.format_user(user), 'User deactivated successfully')
