import asyncio

from aiohttp import web

from biblio.data.loader import load_catalog, make_reader
from biblio.data.schemas import Source

from conftest import SALUD_CSV


async def _serve_and_load(files: dict[str, bytes], sources):
    async def handler(request):
        name = request.match_info["name"]
        if name not in files:
            raise web.HTTPNotFound()
        return web.Response(body=files[name])

    app = web.Application()
    app.router.add_get("/{name}", handler)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    port = runner.addresses[0][1]
    try:
        reader = make_reader(base_url=f"http://127.0.0.1:{port}/")
        return await load_catalog(sources, reader, timeout=5)
    finally:
        await runner.cleanup()


def test_remote_sources_with_fallback_and_failure(sources):
    files = {"salud.txt": SALUD_CSV.encode("utf-8")}
    catalog = asyncio.run(_serve_and_load(files, sources))

    salud, tecno = catalog.statuses
    assert salud.ok
    assert salud.location.endswith("/salud.txt")
    assert salud.record_count == 2
    assert not tecno.ok
    assert "HTTP 404" in tecno.error
    assert catalog.counts() == {"salud": 2, "tecnologias": 0}


def test_remote_single_source():
    files = {"libros.csv": b"Title,Author\nDune,Herbert\n"}
    catalog = asyncio.run(_serve_and_load(files, [Source("libros", "libros")]))
    assert [r.title for r in catalog.records] == ["Dune"]
