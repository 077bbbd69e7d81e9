import json
import logging
from pathlib import Path

from order_inventory.logger import JsonFormatter, get_logger


def test_root_logger_is_singleton():
    logger = get_logger()
    assert logger is get_logger("order_inventory")
    assert logger.propagate is False

    # Other tools (pytest capture) may attach their own handlers; look for ours by type and target
    files = {Path(h.baseFilename).name: h.level for h in logger.handlers if type(h) is logging.FileHandler}
    assert files == {"order_inventory.log": logging.INFO, "errors.log": logging.ERROR}
    consoles = [
        h for h in logger.handlers
        if type(h) is logging.StreamHandler and isinstance(h.formatter, JsonFormatter)
    ]
    assert len(consoles) == 1
    assert consoles[0].level == logging.DEBUG


def test_child_logger_reaches_root_handlers():
    child = get_logger("order_inventory.business.orders.lifecycle")
    assert child.name == "order_inventory.business.orders.lifecycle"
    assert child.parent is get_logger()


def test_json_formatter_output():
    formatter = JsonFormatter({"level": "levelname", "logger": "name", "message": "message"})
    record = logging.LogRecord("order_inventory.test", logging.WARNING, __file__, 1, "stock %s", (3,), None)

    data = json.loads(formatter.format(record))

    assert data == {"level": "WARNING", "logger": "order_inventory.test", "message": "stock 3"}
