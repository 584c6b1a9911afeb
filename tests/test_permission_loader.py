import asyncio

from conftest import ADMIN, SYSTEM_VIEWS, WORKER, WORKER_VIEWS, FakePortalApi, session_for

from portal_auth.application.permissions.loader import PermissionLoader
from portal_auth.domain.permissions.authorizer import PermissionStatus


def make_loader(api: FakePortalApi) -> PermissionLoader:
    return PermissionLoader(api, default_route='/', login_route='/login')


async def test_worker_loads_granted_views_only(api):
    loader = make_loader(api)

    await loader.on_user_changed(WORKER)
    await loader.load()

    assert loader.status is PermissionStatus.LOADED
    assert {view.ruta for view in loader.user_views} == {view.ruta for view in WORKER_VIEWS}
    assert loader.system_views == []
    assert api.system_calls == 0


async def test_admin_also_loads_system_catalog(api):
    loader = make_loader(api)

    await loader.on_user_changed(ADMIN)
    await loader.load()

    assert len(loader.system_views) == len(SYSTEM_VIEWS)
    assert api.system_calls == 1
    grouped = loader.system_views_by_category()
    assert [view.ruta for view in grouped['Administración']] == ['/admin/usuarios']
    assert [view.ruta for view in grouped['General']] == ['/']


async def test_system_catalog_failure_is_not_fatal(api):
    api.system_views_fail = True
    loader = make_loader(api)

    await loader.on_user_changed(ADMIN)
    await loader.load()

    assert loader.status is PermissionStatus.LOADED
    assert loader.system_views == []
    assert len(loader.user_views) == len(SYSTEM_VIEWS)


async def test_granted_views_failure_fails_closed(api):
    api.views_fail = True
    loader = make_loader(api)

    await loader.on_user_changed(WORKER)
    await loader.load()

    assert loader.status is PermissionStatus.LOADED
    assert loader.user_views == []
    assert loader.can_access_route('/')
    assert loader.can_access_route('/login')
    assert not loader.can_access_route('/kardex')


async def test_load_is_idempotent_per_identity(api):
    api.gate = asyncio.Event()
    loader = make_loader(api)
    await loader.on_user_changed(WORKER)

    pending = [asyncio.create_task(loader.load()) for _ in range(3)]
    await asyncio.sleep(0)
    api.gate.set()
    await asyncio.gather(*pending)
    await loader.load()

    assert api.granted_calls == [WORKER.idus]


async def test_optimistic_access_while_loading(api):
    api.gate = asyncio.Event()
    loader = make_loader(api)
    await loader.on_user_changed(WORKER)
    await asyncio.sleep(0)

    assert loader.status is PermissionStatus.LOADING
    assert loader.can_access_route('/anything')

    api.gate.set()
    await loader.load()
    assert not loader.can_access_route('/anything')


async def test_identity_change_discards_stale_views(api):
    api.gate = asyncio.Event()
    loader = make_loader(api)

    await loader.on_user_changed(ADMIN)
    await asyncio.sleep(0)
    await loader.on_user_changed(WORKER)
    api.gate.set()
    await loader.load()

    assert loader.user is WORKER
    assert {view.ruta for view in loader.user_views} == {view.ruta for view in WORKER_VIEWS}
    assert loader.system_views == []
    assert not loader.can_access_route('/admin/usuarios')


async def test_logout_resets_views(api):
    loader = make_loader(api)
    await loader.on_user_changed(WORKER)
    await loader.load()

    await loader.on_user_changed(None)

    assert loader.status is PermissionStatus.NOT_LOADED
    assert loader.user_views == []
    assert not loader.can_access_route('/')


async def test_wait_settled_times_out(api):
    api.gate = asyncio.Event()
    loader = make_loader(api)
    await loader.on_user_changed(WORKER)

    assert await loader.wait_settled(0.01) is False

    api.gate.set()
    assert await loader.wait_settled(1.0) is True


async def test_first_allowed_route_and_menu(api):
    loader = make_loader(api)
    await loader.on_user_changed(WORKER)
    await loader.load()

    assert [node.path for node in loader.menu_items()] == ['/', '/kardex', '/reportes']
    assert loader.first_allowed_route() == '/'


async def test_permission_isolation_across_identities(portal, api, clock):
    await portal.auth.initialize()
    await portal.auth.login(ADMIN, session_for(clock))
    await portal.permissions.load()
    assert portal.permissions.can_access_route('/admin/usuarios')

    await portal.auth.logout()
    api.gate = asyncio.Event()
    await portal.auth.login(WORKER, session_for(clock))
    await asyncio.sleep(0)

    assert portal.permissions.user_views == []
    assert portal.permissions.system_views == []

    api.gate.set()
    await portal.permissions.load()
    assert not portal.permissions.can_access_route('/admin/usuarios')
    assert portal.permissions.can_access_route('/kardex')


async def test_superseded_fetch_runs_to_completion(api):
    api.gate = asyncio.Event()
    loader = make_loader(api)

    await loader.on_user_changed(ADMIN)
    await asyncio.sleep(0)
    await loader.on_user_changed(WORKER)
    assert len(loader._inflight) == 2

    api.gate.set()
    await loader.load()
    for _ in range(3):
        await asyncio.sleep(0)

    assert loader._inflight == set()
    assert api.granted_calls == [ADMIN.idus, WORKER.idus]
    assert {view.ruta for view in loader.user_views} == {view.ruta for view in WORKER_VIEWS}
    assert loader.system_views == []
