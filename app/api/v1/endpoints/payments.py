from typing import List
from fastapi import APIRouter, Depends, status
from app.api.deps import get_filter_criteria, get_payment_service
from app.schemas.criteria import FilterCriteria
from app.schemas.payment import PaymentCreate, PaymentResponse, PaymentUpdate
from app.services.payment_service import PaymentService

router = APIRouter()

@router.get("/", response_model=List[PaymentResponse])
async def list_payments(
    criteria: FilterCriteria = Depends(get_filter_criteria),
    service: PaymentService = Depends(get_payment_service)
):
    """List individual payments (search, filter, date range, sort)"""
    payments = await service.list_payments(criteria)
    return [PaymentResponse.from_payment(p) for p in payments]

@router.post("/", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(
    payment_in: PaymentCreate,
    service: PaymentService = Depends(get_payment_service)
):
    """Record a payment against a customer event"""
    payment = await service.create_payment(payment_in)
    return PaymentResponse.from_payment(payment)

@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: str,
    service: PaymentService = Depends(get_payment_service)
):
    """Get a payment by ID"""
    return PaymentResponse.from_payment(await service.get_payment(payment_id))

@router.patch("/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    payment_id: str,
    payment_in: PaymentUpdate,
    service: PaymentService = Depends(get_payment_service)
):
    """Update a payment"""
    payment = await service.update_payment(payment_id, payment_in)
    return PaymentResponse.from_payment(payment)

@router.delete("/{payment_id}")
async def delete_payment(
    payment_id: str,
    service: PaymentService = Depends(get_payment_service)
):
    """Delete a payment"""
    await service.delete_payment(payment_id)
    return {"message": "Payment deleted successfully"}
