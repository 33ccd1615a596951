"""
Compliance probe endpoint
"""

from fastapi import APIRouter, Depends

from toolsmith.core.dependencies import get_gate
from toolsmith.schemas.tool import ComplianceCheckRequest, ComplianceCheckResponse
from toolsmith.services.compliance import ComplianceGate

router = APIRouter()


@router.post("/check", response_model=ComplianceCheckResponse)
async def check_compliance(payload: ComplianceCheckRequest, gate: ComplianceGate = Depends(get_gate)):
    """Evaluate a candidate name without starting a generation"""
    verdict = gate.check(payload.name)
    return ComplianceCheckResponse(permitted=verdict.permitted, reason=verdict.reason)
