from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import relationship
from models.base import Base


class Operator(Base):
    """
    Charging point operator.

    Top-level operators come straight from the feed. Sub-operators are
    derived from EVSE ids during the station phase; they carry no name
    and point at the operator that delivered their stations.
    """
    __tablename__ = "operators"

    id = Column(String(20), primary_key=True)
    name = Column(String(255), nullable=True)
    parent_id = Column(
        String(20),
        ForeignKey("operators.id", ondelete="CASCADE"),
        nullable=True,
        index=True
    )

    parent = relationship("Operator", remote_side=[id])
    stations = relationship("Station", back_populates="operator", passive_deletes=True)
