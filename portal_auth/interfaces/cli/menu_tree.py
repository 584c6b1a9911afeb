# caminho: portal_auth/interfaces/cli/menu_tree.py
# Funções:
# - walk(): adiciona os nós do menu a uma Rich Tree (recursivo)
# - render_menu(): monta a árvore completa a partir das vistas
# - main(): `portal-menu vistas.json` imprime o menu que o usuário veria

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Optional, Sequence

from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from portal_auth.application.auth.dto import ViewPayload
from portal_auth.domain.permissions.entities import MenuNode, View
from portal_auth.domain.permissions.menu import build_menu, first_menu_path

_VIEWS_ADAPTER = TypeAdapter(list[ViewPayload])


def walk(nodes: Sequence[MenuNode], tree: Tree) -> None:
    """
    Percorre os nós do menu e constrói a Rich Tree;
    grupos sintetizados viram ramos com os filhos em ordem.
    """
    for node in nodes:
        if node.is_group:
            branch = tree.add(f'[bold]{node.name}[/bold] [dim]{node.path}[/dim]')
            walk(node.submenu or [], branch)
        else:
            tree.add(f'{node.name} [dim]{node.path} (orden {node.orden})[/dim]')


def render_menu(views: Sequence[View], *, title: str = 'Menu') -> Tree:
    tree = Tree(title, guide_style='bold bright_blue')
    walk(build_menu(views), tree)
    return tree


def load_views(path: Path) -> list[View]:
    raw = json.loads(path.read_text(encoding='utf-8'))
    # Aceita tanto a lista pura quanto o envelope {success, data, message}
    if isinstance(raw, dict):
        raw = raw.get('data') or []
    return [payload.to_domain() for payload in _VIEWS_ADAPTER.validate_python(raw)]


def main(argv: Optional[Sequence[str]] = None, console: Optional[Console] = None) -> int:
    parser = argparse.ArgumentParser(prog='portal-menu', description='Mostra o menu montado a partir de um JSON de vistas.')
    parser.add_argument('views_file', type=Path, help='arquivo JSON com as vistas (lista ou envelope da API)')
    parser.add_argument('--title', default='Menu')
    args = parser.parse_args(argv)

    console = console or Console()
    try:
        views = load_views(args.views_file)
    except (OSError, ValueError, ValidationError) as exc:
        console.print(f'[red]Arquivo de vistas inválido:[/red] {escape(str(exc))}')
        return 1

    console.print(render_menu(views, title=args.title))
    console.print(f'Primeira rota: {first_menu_path(build_menu(views)) or "-"}')
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
