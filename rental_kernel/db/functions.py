"""
Module: rental_kernel.db.functions
Responsibility: Portable SQL expressions for the difference between two
    timestamp columns, compiled per dialect.
Architecture position: Kernel > DB. Used by the repository predicates so the
    overdue queries run server-side on SQLite, PostgreSQL and MySQL.

Invariants enforced:
    - ``seconds_between(start, end)`` is ``end - start`` in whole seconds.
      Stored timestamps have one-second resolution, so the value is exact.
    - ``minutes_between(start, end)`` is ``floor((end - start) / 60s)``
      for non-negative differences, the same rounding as
      ``rental_engines.overdue.overdue_minutes``.

Failure modes:
    - CompileError on a dialect without a registered compilation.
"""

from sqlalchemy import Integer
from sqlalchemy.exc import CompileError
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement


class seconds_between(FunctionElement):
    """``end - start`` in seconds."""

    type = Integer()
    name = "seconds_between"
    inherit_cache = True


class minutes_between(FunctionElement):
    """``end - start`` in whole minutes (floored)."""

    type = Integer()
    name = "minutes_between"
    inherit_cache = True


def _operands(element, compiler, **kw) -> tuple[str, str]:
    start, end = list(element.clauses)
    return compiler.process(start, **kw), compiler.process(end, **kw)


@compiles(seconds_between)
@compiles(minutes_between)
def _unsupported(element, compiler, **kw):
    raise CompileError(
        f"{element.name} is not supported on dialect {compiler.dialect.name!r}"
    )


# SQLite ---------------------------------------------------------------------


def _sqlite_epoch(operand: str) -> str:
    return f"CAST(strftime('%s', {operand}) AS INTEGER)"


@compiles(seconds_between, "sqlite")
def _seconds_between_sqlite(element, compiler, **kw):
    start, end = _operands(element, compiler, **kw)
    return f"({_sqlite_epoch(end)} - {_sqlite_epoch(start)})"


@compiles(minutes_between, "sqlite")
def _minutes_between_sqlite(element, compiler, **kw):
    start, end = _operands(element, compiler, **kw)
    # Integer division truncates; operands are non-negative where used.
    return f"(({_sqlite_epoch(end)} - {_sqlite_epoch(start)}) / 60)"


# PostgreSQL -----------------------------------------------------------------


@compiles(seconds_between, "postgresql")
def _seconds_between_postgresql(element, compiler, **kw):
    start, end = _operands(element, compiler, **kw)
    return f"CAST(EXTRACT(EPOCH FROM ({end} - {start})) AS BIGINT)"


@compiles(minutes_between, "postgresql")
def _minutes_between_postgresql(element, compiler, **kw):
    start, end = _operands(element, compiler, **kw)
    return f"CAST(FLOOR(EXTRACT(EPOCH FROM ({end} - {start})) / 60) AS BIGINT)"


# MySQL / MariaDB ------------------------------------------------------------


@compiles(seconds_between, "mysql")
@compiles(seconds_between, "mariadb")
def _seconds_between_mysql(element, compiler, **kw):
    start, end = _operands(element, compiler, **kw)
    return f"TIMESTAMPDIFF(SECOND, {start}, {end})"


@compiles(minutes_between, "mysql")
@compiles(minutes_between, "mariadb")
def _minutes_between_mysql(element, compiler, **kw):
    start, end = _operands(element, compiler, **kw)
    return f"TIMESTAMPDIFF(MINUTE, {start}, {end})"
