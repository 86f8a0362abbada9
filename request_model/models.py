from sqlalchemy import Column, Integer, String, Date, Numeric, Text, Index
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Request(Base):
    __tablename__ = "requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    emp_id = Column(String(50), nullable=False)
    program = Column(String(255), nullable=False)
    program_time = Column(String(255), nullable=True)
    request_date = Column(Date, nullable=False)
    status = Column(String(50), nullable=False, default="Pending", server_default="Pending")
    loan_type = Column(String(100), nullable=True)
    amount = Column(Numeric, nullable=True)
    reason = Column(Text, nullable=True)
    document_path = Column(String(255), nullable=True)

    __table_args__ = (
        Index("idx_requests_emp_id_program", "emp_id", "program"),
        Index("idx_requests_request_date", "request_date"),
    )
