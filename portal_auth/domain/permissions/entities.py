# caminho: portal_auth/domain/permissions/entities.py
# Funções:
# - View: unidade de permissão (rota + metadados de exibição)
# - MenuNode: nó da árvore de navegação derivada das vistas

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(slots=True, frozen=True)
class View:
    ruta: str
    nombre: str
    orden: int
    icono: Optional[str] = None
    categoria: Optional[str] = None
    id: Optional[int] = None

    @property
    def segments(self) -> list[str]:
        return [part for part in self.ruta.split('/') if part]


@dataclass(slots=True)
class MenuNode:
    path: str
    name: str
    orden: int
    icon: Optional[str] = None
    categoria: Optional[str] = None
    submenu: Optional[list[MenuNode]] = None

    @property
    def is_group(self) -> bool:
        return self.submenu is not None

    @classmethod
    def from_view(cls, view: View) -> MenuNode:
        return cls(
            path=view.ruta,
            name=view.nombre,
            icon=view.icono,
            categoria=view.categoria,
            orden=view.orden,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            'path': self.path,
            'name': self.name,
            'icon': self.icon,
            'categoria': self.categoria,
            'orden': self.orden,
        }
        if self.submenu is not None:
            data['submenu'] = [child.to_dict() for child in self.submenu]
        return data
