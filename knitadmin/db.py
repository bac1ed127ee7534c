"""
Database models for the Knit Pattern Admin service

Handles:
- Measurement rules (required measurement items per category/sleeve type)
- Templates (rule reference, construction attributes, per-size tables)
- Chart types (stitch-diagram point/edge geometry)

The default database is an in-memory SQLite store that lives as long as
the process does. Point DATABASE_URL at a real server to swap it out.
"""
from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import (
    create_engine, Column, Integer, String, Float,
    DateTime, ForeignKey, JSON, Enum, Index
)
from sqlalchemy.orm import declarative_base, sessionmaker, relationship
from sqlalchemy.pool import StaticPool

from .config import get_settings

settings = get_settings()


def make_engine(database_url: str):
    """Build an engine; in-memory SQLite gets one shared connection."""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


engine = make_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


# ============== Enums ==============

class ToolType(str, PyEnum):
    KNITTING_NEEDLE = "대바늘"
    CROCHET_HOOK = "코바늘"


class PatternType(str, PyEnum):
    WRITTEN = "서술형"
    CHART = "차트형"
    MIXED = "혼합형"


class PublishStatus(str, PyEnum):
    PUBLIC = "공개"
    PRIVATE = "비공개"


class ConstructionMethod(str, PyEnum):
    TOP_DOWN = "탑다운"
    BOTTOM_UP = "바텀업"
    PIECED = "조각잇기형"
    IN_THE_ROUND = "원통형"


class SleeveType(str, PyEnum):
    RAGLAN = "래글런형"
    SET_IN = "셋인형"
    YOKE = "요크형"
    SADDLE_SHOULDER = "새들숄더형"
    DROP_SHOULDER = "드롭숄더형"
    VEST = "베스트형"


class NecklineType(str, PyEnum):
    ROUND = "라운드넥"
    V_NECK = "브이넥"
    SQUARE = "스퀘어넥"


class SizeRange(str, PyEnum):
    S50_53 = "50-53"
    S54_57 = "54-57"
    S58_61 = "58-61"
    S62_65 = "62-65"
    S66_69 = "66-69"
    S70_73 = "70-73"
    S74_79 = "74-79"
    S80_84 = "80-84"
    S85_89 = "85-89"
    S90_94 = "90-94"
    S95_99 = "95-99"
    S100_104 = "100-104"
    S105_109 = "105-109"
    S110_114 = "110-114"
    S115_120 = "115-120"
    S121_129 = "121-129"
    MIN = "min"
    MAX = "max"


class LineType(str, PyEnum):
    STRAIGHT = "straight"
    CURVE = "curve"


class MeasurementAxis(str, PyEnum):
    X = "x"
    Y = "y"
    BOTH = "both"


# ============== Measurement Rule Models ==============

class MeasurementRule(Base):
    """Required measurement items for a (category, sleeve type) pair."""
    __tablename__ = "measurement_rules"

    id = Column(String(64), primary_key=True, index=True)
    category_id = Column(Integer, nullable=False)  # leaf category, e.g. 103 스웨터
    sleeve_type = Column(Enum(SleeveType))  # None for sleeveless categories

    # Always "{sleeve_type} {category name}" or the bare category name
    name = Column(String(255), nullable=False)
    items = Column(JSON, nullable=False, default=list)  # catalog ids, display order

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    templates = relationship("Template", back_populates="measurement_rule")

    __table_args__ = (
        Index('ix_measurement_rule_category_sleeve', 'category_id', 'sleeve_type'),
    )


# ============== Template Models ==============

class Template(Base):
    """Reusable pattern definition built on one measurement rule."""
    __tablename__ = "templates"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(255), nullable=False)

    tool_type = Column(Enum(ToolType), nullable=False, default=ToolType.KNITTING_NEEDLE)
    pattern_type = Column(Enum(PatternType), nullable=False, default=PatternType.WRITTEN)
    publish_status = Column(Enum(PublishStatus), default=PublishStatus.PUBLIC)
    thumbnail = Column(String(500))

    # Derived from the rule: [major, mid, minor] category path
    category_ids = Column(JSON, nullable=False, default=list)

    # Knitting-needle tops only
    construction_methods = Column(JSON, default=list)  # ["탑다운", ...]
    sleeve_type = Column(Enum(SleeveType))
    neckline_type = Column(Enum(NecklineType))

    measurement_items = Column(JSON, default=list)  # copied from the rule
    chart_type_ids = Column(JSON, default=list)  # ["chart1", ...]

    measurement_rule_id = Column(String(64), ForeignKey('measurement_rules.id'), nullable=False)
    measurement_rule = relationship("MeasurementRule", back_populates="templates")

    # [{size_range, measurements: {item_id: value}}, ...]
    size_details = Column(JSON, default=list)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# ============== Chart Type Models ==============

class ChartType(Base):
    """Persisted output of the chart geometry editor."""
    __tablename__ = "chart_types"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(255), nullable=False)

    coordinates = Column(JSON, default=list)  # [{x, y, measurement_item?, angle?}, ...]
    draw_order = Column(JSON, default=list)  # [point index, ...]
    line_connections = Column(JSON, default=list)  # [{from_index, to_index, type, measurement_item?}, ...]
    control_points = Column(JSON, default=dict)  # {"conn-0-1": {x, y}, ...}

    armhole_depth = Column(Float)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# ============== Database Initialization ==============

def init_db(bind=None):
    """Create all tables and load the sample data set."""
    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    if settings.seed_sample_data:
        from .patterns.sample_data import seed_sample_data

        db = sessionmaker(autocommit=False, autoflush=False, bind=bind)()
        try:
            seed_sample_data(db)
        finally:
            db.close()


def get_db():
    """Dependency for FastAPI."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
