import pytest

from portal_auth.domain.credentials.document import classify_document, clean_digits, is_document_valid
from portal_auth.domain.sessions.enums import DOCUMENT_KIND_CHOICES
from portal_auth.shared.i18n import get_translator


@pytest.mark.parametrize(
    ('raw', 'kind'),
    [
        ('', 'INCOMPLETE'),
        ('1234567', 'INCOMPLETE'),
        ('12345678', 'DNI'),
        ('123456789', 'INVALID'),
        ('1234567890', 'INVALID'),
        ('20123456789', 'RUC'),
        ('201234567891', 'INVALID'),
    ],
)
def test_classify_document_by_length(raw, kind):
    assert classify_document(raw).kind == kind


def test_classify_document_strips_non_digits():
    result = classify_document(' 12.345-678 ')

    assert result.kind == 'DNI'
    assert result.digits == '12345678'
    assert result.is_valid
    assert result.message == 'DNI válido'


def test_classify_document_messages():
    assert classify_document('123').message == 'DNI debe tener 8 dígitos'
    assert classify_document('123456789').message == 'Documento inválido - DNI debe tener 8 dígitos'
    assert classify_document('1234567890').message == 'Documento inválido - RUC debe tener 11 dígitos'
    assert classify_document('1' * 14).message == 'RUC debe tener máximo 11 dígitos'


def test_classify_document_uses_translator():
    result = classify_document('20123456789', get_translator('en'))

    assert result.kind == 'RUC'
    assert result.message == 'Valid RUC'


def test_classify_document_is_total():
    for length in range(0, 20):
        result = classify_document('9' * length)
        assert result.kind in DOCUMENT_KIND_CHOICES
        assert result.is_valid == (length in (8, 11))


def test_non_digit_input_is_incomplete():
    result = classify_document('abc-def')

    assert result.kind == 'INCOMPLETE'
    assert result.digits == ''
    assert clean_digits(None) == ''


def test_is_document_valid():
    assert is_document_valid('12345678')
    assert is_document_valid('2012345678-9')
    assert not is_document_valid('123456789')
