# inventory_planning/models.py
from sqlalchemy import Column, Integer, String, Float, DateTime, Boolean, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
import enum

Base = declarative_base()

class Priority(enum.Enum):
    """Production priority tier.

    Values:
        HIGH ('Hoch'): stock runs out before the safety buffer
        MEDIUM ('Mittel'): stock runs out before twice the safety buffer
        LOW ('Tief'): everything else
    """
    HIGH = 'Hoch'
    MEDIUM = 'Mittel'
    LOW = 'Tief'

    def __str__(self):
        """Return the string value of the enum."""
        return self.value

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}

class CoverageStatus(enum.Enum):
    """Raw material stock coverage status, most severe first."""
    RED = 'red'
    ORANGE = 'orange'
    YELLOW = 'yellow'
    GREEN = 'green'

    def __str__(self):
        return self.value

    @property
    def severity(self) -> int:
        """Sort rank; 0 is the most severe."""
        return _STATUS_SEVERITY[self]

_STATUS_SEVERITY = {
    CoverageStatus.RED: 0,
    CoverageStatus.ORANGE: 1,
    CoverageStatus.YELLOW: 2,
    CoverageStatus.GREEN: 3,
}

class TrendDirection(enum.Enum):
    UP = 'up'
    DOWN = 'down'
    STABLE = 'stable'

    def __str__(self):
        return self.value

# Month column names as stored. Sales history and raw material consumption
# were imported by different tools and spell March differently.
SALES_MONTH_COLUMNS = ('jan', 'feb', 'mär', 'apr', 'mai', 'jun', 'jul', 'aug', 'sep', 'okt', 'nov', 'dez')
CONSUMPTION_MONTH_COLUMNS = ('jan', 'feb', 'mrz', 'apr', 'mai', 'jun', 'jul', 'aug', 'sep', 'okt', 'nov', 'dez')

class SalesHistory(Base):
    """Finished goods sales per article and calendar month of one year."""
    __tablename__ = 'sales_history'

    id = Column(Integer, primary_key=True)
    artikelnummer = Column(String(128), nullable=False)
    year = Column(Integer, nullable=False)
    jan = Column(Float)
    feb = Column(Float)
    maer = Column('mär', Float)
    apr = Column(Float)
    mai = Column(Float)
    jun = Column(Float)
    jul = Column(Float)
    aug = Column(Float)
    sep = Column(Float)
    okt = Column(Float)
    nov = Column(Float)
    dez = Column(Float)
    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (
        Index('ix_sales_history_year_artikel', 'year', 'artikelnummer'),
    )

    def __repr__(self):
        return f"<SalesHistory(artikelnummer='{self.artikelnummer}', year={self.year})>"

class ProductInfo(Base):
    """Per-article master data used by production planning."""
    __tablename__ = 'product_infos'

    id = Column(Integer, primary_key=True)
    artikelnummer = Column(String(128), nullable=False, unique=True)
    mindestbestand = Column(Float, default=0.0)
    beutelgroesse = Column(String(64))
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<ProductInfo(artikelnummer='{self.artikelnummer}', mindestbestand={self.mindestbestand})>"

class RawMaterialConsumption(Base):
    """Raw material consumption per SKU and calendar month of one year."""
    __tablename__ = 'raw_material_consumption'

    id = Column(Integer, primary_key=True)
    sku = Column(String(128), nullable=False)
    name = Column(String(512))
    year = Column(Integer, nullable=False)
    jan = Column(Float)
    feb = Column(Float)
    mrz = Column(Float)
    apr = Column(Float)
    mai = Column(Float)
    jun = Column(Float)
    jul = Column(Float)
    aug = Column(Float)
    sep = Column(Float)
    okt = Column(Float)
    nov = Column(Float)
    dez = Column(Float)
    herkunft = Column(String(256))
    lieferant = Column(String(256))
    zwischenhaendler = Column(String(256))
    # Lead time in months, stored as free text from the import file
    lieferzeit = Column(String(64))
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('sku', 'year', name='uq_raw_material_consumption_sku_year'),
    )

    def __repr__(self):
        return f"<RawMaterialConsumption(sku='{self.sku}', year={self.year})>"

class ProductionPlanRun(Base):
    """Header of one production planning run (config snapshot)."""
    __tablename__ = 'production_plan_runs'

    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime, server_default=func.now())
    coverage_days = Column(Integer, nullable=False)
    safety_buffer = Column(Integer, nullable=False)
    production_time = Column(Integer, default=0)
    holiday_lead_time_days = Column(Integer, nullable=False)
    holiday_factor = Column(Float, nullable=False)
    sales_year = Column(Integer, nullable=False)

    items = relationship("ProductionPlanItem", back_populates="run", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<ProductionPlanRun(id={self.id}, sales_year={self.sales_year})>"

class ProductionPlanItem(Base):
    """One SKU decision of a production planning run."""
    __tablename__ = 'production_plan_items'

    id = Column(Integer, primary_key=True)
    run_id = Column(Integer, ForeignKey('production_plan_runs.id', ondelete='CASCADE'), nullable=False)
    artikelnummer = Column(String(128), nullable=False)
    name = Column(String(512))
    bag_size = Column(String(64))
    current_stock = Column(Float, nullable=False)
    final_daily_usage = Column(Float, nullable=False)
    final_monthly_usage = Column(Float)
    days_until_stockout = Column(Float, nullable=False)
    desired_stock = Column(Float, nullable=False)
    amount_to_produce = Column(Integer, nullable=False, default=0)
    priority = Column(String(16), nullable=False)
    to_produce = Column(Boolean, nullable=False, default=False)
    mhd_lieferant = Column(String(64))
    abweichung = Column(Integer)
    lot = Column(String(128))
    mhd = Column(String(64))

    run = relationship("ProductionPlanRun", back_populates="items")

    __table_args__ = (
        Index('ix_production_plan_items_run', 'run_id'),
    )

    def __repr__(self):
        return f"<ProductionPlanItem(run_id={self.run_id}, artikelnummer='{self.artikelnummer}', priority='{self.priority}')>"
