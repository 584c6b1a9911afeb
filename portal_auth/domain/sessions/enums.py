# caminho: portal_auth/domain/sessions/enums.py
# Funções:
# - Define os value objects de tipo de usuário e de documento.
# - Fornece utilitários para obter as escolhas a partir dos Literals.

from __future__ import annotations

from typing import Annotated, Any, Literal, get_args, get_origin

from pydantic import StringConstraints

SC = StringConstraints
StrippedStr = SC(strip_whitespace=True)


def _choices_from_annotated_literal(annotation: Any) -> tuple[str, ...]:
    """Extrai as opções de um tipo Annotated que contém um Literal."""
    if get_origin(annotation) is Literal:
        literal = annotation
    else:
        literal = next((arg for arg in get_args(annotation) if get_origin(arg) is Literal), None)
    if literal is None:
        msg = f'Annotation {annotation!r} does not include a typing.Literal.'
        raise TypeError(msg)
    return tuple(str(value) for value in get_args(literal))


# ─────────────────────────────────────────────────────────────────────────────
# Tipo de usuário
# Define a aba de login e se o catálogo completo de vistas é carregado.
# Apenas 'Admin' recebe o catálogo do sistema.
# ─────────────────────────────────────────────────────────────────────────────
UserType = Annotated[
    str,
    Literal['Admin', 'Trabajador'],
    StrippedStr,
]
USER_TYPE_CHOICES: tuple[str, ...] = _choices_from_annotated_literal(UserType)
USER_TYPE_DEFAULT: str = 'Trabajador'


# ─────────────────────────────────────────────────────────────────────────────
# Classificação do documento digitado
# DNI = 8 dígitos; RUC = 11 dígitos; INCOMPLETE = menos de 8;
# INVALID = 9, 10 ou mais de 11 dígitos.
# ─────────────────────────────────────────────────────────────────────────────
DocumentKind = Annotated[
    str,
    Literal['DNI', 'RUC', 'INCOMPLETE', 'INVALID'],
]
DOCUMENT_KIND_CHOICES: tuple[str, ...] = _choices_from_annotated_literal(DocumentKind)
DOCUMENT_KINDS_ACCEPTED: frozenset[str] = frozenset({'DNI', 'RUC'})
