import json
import logging

from biblio.logging_setup import JsonFormatter


def test_json_formatter_includes_extras():
    record = logging.LogRecord("biblio.data.loader", logging.INFO, __file__, 1,
                               "loaded %s", ("salud",), None)
    record.category = "salud"
    payload = json.loads(JsonFormatter().format(record))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "biblio.data.loader"
    assert payload["msg"] == "loaded salud"
    assert payload["category"] == "salud"
