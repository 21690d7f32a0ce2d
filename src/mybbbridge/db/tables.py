"""
MyBB 테이블 정의 (SQLAlchemy Core).

브리지가 읽고 쓰는 컬럼만 선언한다. 테이블 prefix(기본 "mybb_")는
Table 이름에만 들어가고, SQL 문자열에 값이 이어 붙는 일은 없다.
"""

from dataclasses import dataclass

from sqlalchemy import Column, Integer, MetaData, SmallInteger, String, Table, Text


@dataclass(frozen=True)
class BridgeTables:
    """prefix 적용된 테이블 묶음."""
    metadata: MetaData
    themes: Table
    themestylesheets: Table
    templates: Table
    templatesets: Table
    templategroups: Table


def build_tables(prefix: str = "mybb_") -> BridgeTables:
    """
    prefix별 Table 객체 생성.

    Args:
        prefix: 테이블 prefix

    Returns:
        BridgeTables
    """
    metadata = MetaData()

    themes = Table(
        f"{prefix}themes",
        metadata,
        Column("tid", Integer, primary_key=True),
        Column("name", String(100), nullable=False, default=""),
    )

    themestylesheets = Table(
        f"{prefix}themestylesheets",
        metadata,
        Column("sid", Integer, primary_key=True),
        Column("name", String(30), nullable=False, default=""),
        Column("tid", Integer, nullable=False, default=0),
        Column("attachedto", Text, nullable=False, default=""),
        Column("stylesheet", Text, nullable=False),
        Column("cachefile", String(100), nullable=False, default=""),
        Column("lastmodified", Integer, nullable=False, default=0),
    )

    templates = Table(
        f"{prefix}templates",
        metadata,
        Column("tid", Integer, primary_key=True),
        Column("title", String(120), nullable=False, default=""),
        Column("template", Text, nullable=False),
        Column("sid", SmallInteger, nullable=False, default=0),
        Column("version", String(20), nullable=False, default="0"),
        Column("status", String(10), nullable=False, default=""),
        Column("dateline", Integer, nullable=False, default=0),
    )

    templatesets = Table(
        f"{prefix}templatesets",
        metadata,
        Column("sid", Integer, primary_key=True),
        Column("title", String(120), nullable=False, default=""),
    )

    templategroups = Table(
        f"{prefix}templategroups",
        metadata,
        Column("gid", Integer, primary_key=True),
        Column("prefix", String(50), nullable=False, default=""),
        Column("title", String(100), nullable=False, default=""),
        Column("isdefault", SmallInteger, nullable=False, default=0),
    )

    return BridgeTables(
        metadata=metadata,
        themes=themes,
        themestylesheets=themestylesheets,
        templates=templates,
        templatesets=templatesets,
        templategroups=templategroups,
    )
