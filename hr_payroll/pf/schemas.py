"""PF register Pydantic v2 schemas — request/response validation."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from hr_payroll.common.constants import PaymentStatus


class PfEntryOut(BaseModel):
    """One employee's line in the monthly PF register."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: str
    employee_name: Optional[str] = None
    employee_code: Optional[str] = None
    department: Optional[str] = None
    month: str
    pf_included: bool
    pf_amount: int = 0
    pf_base: int = 0
    payment_status: PaymentStatus = PaymentStatus.pending
    salary_credited: bool = False
    saved: bool = False


class PfTotals(BaseModel):
    included_count: int = 0
    total_pf_amount: int = 0
    paid_count: int = 0
    pending_count: int = 0


class PfRegisterResponse(BaseModel):
    month: str
    data: List[PfEntryOut]
    totals: PfTotals


class PfEntryUpdate(BaseModel):
    """Partial update of a register line; omitted fields keep their value."""

    pf_included: Optional[bool] = None
    payment_status: Optional[PaymentStatus] = None


class PfSaveResponse(BaseModel):
    month: str
    saved: int
