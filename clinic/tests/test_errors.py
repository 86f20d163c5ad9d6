import pytest
from django.db import DatabaseError
from django.urls import reverse
from rest_framework.exceptions import NotFound
from rest_framework.test import APIRequestFactory

from clinic.exceptions import Conflict, InsufficientStock, SlotUnavailable, api_exception_handler


def handle(exc):
    request = APIRequestFactory().get('/')
    return api_exception_handler(exc, {'request': request, 'view': None})


@pytest.mark.parametrize('exc, status, code', [
    (SlotUnavailable(), 422, 'slot_unavailable'),
    (Conflict('already there'), 409, 'conflict'),
    (NotFound('nope'), 404, 'not_found'),
    (DatabaseError('disk full'), 500, 'storage_error'),
    (RuntimeError('boom'), 500, 'server_error'),
])
def test_envelope(exc, status, code):
    resp = handle(exc)
    assert resp.status_code == status
    assert resp.data['ok'] is False
    assert resp.data['error']['code'] == code


def test_internal_messages_are_not_leaked():
    resp = handle(DatabaseError('password=hunter2'))
    assert 'hunter2' not in str(resp.data)


def test_insufficient_stock_lists_every_item():
    items = [{'medicine_id': 1, 'medicine_name': 'A', 'available': 0, 'requested': 2},
             {'medicine_id': 3, 'medicine_name': 'B', 'available': 1, 'requested': 5}]
    resp = handle(InsufficientStock(items))
    assert resp.status_code == 422
    assert resp.data['error']['items'] == items
    assert resp.data['error']['message'] == 'Insufficient stock for medicine 1, 3'


@pytest.mark.django_db
def test_healthz(client):
    r = client.get(reverse('healthz'))
    assert r.status_code == 200
    assert r.json()['ok'] is True
