"""
SQLite write locking

pysqlite defers BEGIN until the first DML statement and SQLite ignores
SELECT ... FOR UPDATE, so on SQLite the product row lock would otherwise
lock nothing. Taking over transaction control and starting every
transaction with BEGIN IMMEDIATE makes each unit of work hold the database
write lock from its first read, which serializes lifecycle operations.
"""
from sqlalchemy import event

from order_inventory.logger import get_logger

logger = get_logger("order_inventory.data.sqlite_locking")


def enable_immediate_transactions(engine):
    """Install the connect/begin listeners on a SQLite engine; other dialects are left alone."""
    if engine.dialect.name != 'sqlite':
        return False

    @event.listens_for(engine, 'connect')
    def disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, 'begin')
    def begin_immediate(conn):
        conn.exec_driver_sql('BEGIN IMMEDIATE')

    logger.debug("SQLite transactions start with BEGIN IMMEDIATE")
    return True
