from biblio.data.store import CatalogStore


def test_store_load_and_search(data_dir, sources):
    store = CatalogStore(sources=sources, data_dir=data_dir, base_url="")
    assert not store.is_loaded

    store.load()
    assert store.is_loaded
    assert store.record_count() == 3
    assert store.failed_count() == 0
    assert [r.title for r in store.search("quimica")] == ["Introducción a la Química"]
    assert store.has_category("salud") and store.has_category("all")
    assert not store.has_category("derecho")


def test_reload_swaps_catalog(data_dir, sources):
    store = CatalogStore(sources=sources, data_dir=data_dir, base_url="").load()
    first = store.catalog

    store.load()
    assert store.catalog is not first
    assert [r.to_dict() for r in store.catalog.records] == [r.to_dict() for r in first.records]

    with open(data_dir / "tecnologias.csv", "a", encoding="utf-8") as f:
        f.write("Redes de computadores,Tanenbaum,2011\n")
    store.load()
    assert store.record_count() == 4
    assert first.record_count() == 3

