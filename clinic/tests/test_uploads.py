import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse

pytestmark = pytest.mark.django_db

PDF_BYTES = b'%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\ntrailer << /Root 1 0 R >>\n%%EOF\n'


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = str(tmp_path)
    return tmp_path


def test_upload_pdf(patient, client_for, media_root):
    f = SimpleUploadedFile('my-cv.pdf', PDF_BYTES, content_type='application/pdf')
    r = client_for(patient).post(reverse('upload-document'), {'file': f, 'type': 'cv'}, format='multipart')
    assert r.status_code == 201
    data = r.data['data']
    assert data['file_type'] == 'cv'
    assert data['original_name'] == 'my-cv.pdf'
    assert data['file_size'] == len(PDF_BYTES)
    assert data['file_path'].startswith('documents/cv_')
    assert data['file_url'].startswith('http://testserver/media/documents/cv_')
    assert (media_root / data['file_path']).read_bytes() == PDF_BYTES


def test_non_pdf_is_rejected(patient, client_for):
    f = SimpleUploadedFile('photo.png', b'\x89PNG\r\n', content_type='image/png')
    r = client_for(patient).post(reverse('upload-document'), {'file': f, 'type': 'cv'}, format='multipart')
    assert r.status_code == 422
    assert 'file' in r.data['error']['fields']


def test_oversized_file_is_rejected(patient, client_for, settings):
    settings.UPLOAD_MAX_MB = 0
    f = SimpleUploadedFile('big.pdf', PDF_BYTES, content_type='application/pdf')
    r = client_for(patient).post(reverse('upload-document'), {'file': f, 'type': 'diploma'}, format='multipart')
    assert r.status_code == 422


def test_unknown_document_type(patient, client_for):
    f = SimpleUploadedFile('cv.pdf', PDF_BYTES, content_type='application/pdf')
    r = client_for(patient).post(reverse('upload-document'), {'file': f, 'type': 'selfie'}, format='multipart')
    assert r.status_code == 422
    assert 'type' in r.data['error']['fields']


def test_upload_requires_login(api):
    f = SimpleUploadedFile('cv.pdf', PDF_BYTES, content_type='application/pdf')
    assert api.post(reverse('upload-document'), {'file': f, 'type': 'cv'}, format='multipart').status_code == 401
