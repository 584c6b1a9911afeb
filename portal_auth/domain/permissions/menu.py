# caminho: portal_auth/domain/permissions/menu.py
# Funções:
# - build_menu(): lista plana de vistas -> árvore ordenada e agrupada
# - first_menu_path(): primeira rota navegável do menu (escape do acesso negado)

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from portal_auth.config.constants import MENU_FOLDER_ICON
from portal_auth.domain.permissions.entities import MenuNode, View


def _by_orden(node: MenuNode) -> int:
    return node.orden


def build_menu(views: Iterable[View]) -> list[MenuNode]:
    """Monta o menu de navegação a partir das vistas concedidas.

    Rotas de um segmento viram itens de topo. Rotas aninhadas são agrupadas
    pelo primeiro segmento num nó sintetizado (`/reportes` -> "Reportes"),
    cujo `orden` é o do primeiro filho encontrado. As vistas são percorridas
    em ordem crescente de `orden` (sort estável), então esse filho é sempre
    o de menor `orden` do grupo.

    Cada grupo é inserido antes do primeiro item de topo com `orden` maior e,
    por fim, a lista inteira é ordenada de novo por `orden`.
    """
    top_level: list[MenuNode] = []
    groups: dict[str, MenuNode] = {}

    for view in sorted(views, key=lambda item: item.orden):
        segments = view.segments
        if len(segments) <= 1:
            top_level.append(MenuNode.from_view(view))
            continue

        parent_path = f'/{segments[0]}'
        parent = groups.get(parent_path)
        if parent is None:
            parent = MenuNode(
                path=parent_path,
                name=segments[0][:1].upper() + segments[0][1:],
                icon=MENU_FOLDER_ICON,
                categoria=view.categoria,
                orden=view.orden,
                submenu=[],
            )
            groups[parent_path] = parent
        parent.submenu.append(MenuNode.from_view(view))

    for parent in groups.values():
        parent.submenu.sort(key=_by_orden)
        insert_index = next(
            (index for index, item in enumerate(top_level) if item.orden > parent.orden),
            None,
        )
        if insert_index is None:
            top_level.append(parent)
        else:
            top_level.insert(insert_index, parent)

    top_level.sort(key=_by_orden)
    return top_level


def first_menu_path(menu: Sequence[MenuNode]) -> Optional[str]:
    if not menu:
        return None
    first = menu[0]
    # Grupo sintetizado não é uma vista concedida: desce até o primeiro filho
    if first.submenu:
        return first.submenu[0].path
    return first.path
