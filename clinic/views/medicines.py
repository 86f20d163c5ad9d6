from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.context import caller_from_request
from clinic.models import Medicine
from clinic.permissions import IsAdminRole, IsDoctorRole
from clinic.serializers.medicines import MedicineSerializer, StockSerializer
from clinic.services import inventory

from .common import ok, validated


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def doctor_medicines(request):
    """Medicines a doctor can prescribe right now (stock > 0)."""
    return ok([inventory.format_medicine(m) for m in inventory.available_medicines()])


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_medicines(request):
    if request.method == 'GET':
        return ok([inventory.format_medicine(m) for m in Medicine.objects.order_by('name')])
    vd = validated(MedicineSerializer, request.data)
    medicine = inventory.create_medicine(caller_from_request(request), vd)
    return ok(inventory.format_medicine(medicine), 'Medicine created successfully', status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_medicine_detail(request, medicine_id: int):
    if request.method == 'GET':
        return ok(inventory.format_medicine(inventory.get_medicine_or_404(medicine_id)))
    caller = caller_from_request(request)
    if request.method == 'DELETE':
        inventory.delete_medicine(caller, medicine_id)
        return ok(None, 'Medicine deleted successfully')

    inventory.get_medicine_or_404(medicine_id)
    vd = validated(MedicineSerializer, request.data, partial=True, context={'medicine_id': medicine_id})
    medicine = inventory.update_medicine(caller, medicine_id, vd)
    return ok(inventory.format_medicine(medicine), 'Medicine updated successfully')


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_medicine_stock(request, medicine_id: int):
    vd = validated(StockSerializer, request.data)
    medicine, previous = inventory.set_stock(caller_from_request(request), medicine_id, vd['stock'], vd.get('reason'))
    data = inventory.format_medicine(medicine)
    data['previous_stock'] = previous
    return ok(data, 'Stock updated successfully')
