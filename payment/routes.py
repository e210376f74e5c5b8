from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel
from bson import ObjectId
from models.appointment import Appointment
from appointment.slots import get_appointment_or_404
import stripe
import json
import logging
import config

logger = logging.getLogger(__name__)

router = APIRouter()

CHECKOUT_COMPLETED = "checkout.session.completed"


class CheckoutSessionRequest(BaseModel):
    appointment_id: str


@router.post("/create-checkout-session")
async def create_checkout_session(request: CheckoutSessionRequest, http_request: Request):
    logger.info(f"Creating checkout session for appointment {request.appointment_id}")
    appointment = await get_appointment_or_404(request.appointment_id)
    if appointment.cancelled:
        raise HTTPException(status_code=400, detail="Appointment is cancelled")
    if appointment.payment:
        raise HTTPException(status_code=400, detail="Appointment already paid")

    base_url = http_request.headers.get("origin") or config.FRONTEND_URL
    doctor_name = appointment.doc_data.get("full_name", "Doctor")

    stripe.api_key = config.STRIPE_SECRET_KEY
    try:
        session = stripe.checkout.Session.create(
            payment_method_types=["card"],
            line_items=[{
                "price_data": {
                    "currency": config.STRIPE_CURRENCY,
                    "product_data": {
                        "name": f"Appointment with {doctor_name}",
                    },
                    "unit_amount": int(round(appointment.amount * 100)),
                },
                "quantity": 1,
            }],
            mode="payment",
            success_url=f"{base_url}/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{base_url}/cancel",
            metadata={"appointment_id": str(appointment.id)},
        )
    except stripe.StripeError as e:
        logger.error(f"Stripe error: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Unexpected error: {str(e)}")
        raise HTTPException(status_code=500, detail="Internal server error")

    logger.info(f"Checkout session created successfully: {session.id}")
    return {"success": True, "session_id": session.id, "url": session.url}


async def mark_appointment_paid(appointment_id: str):
    if not appointment_id or not ObjectId.is_valid(appointment_id):
        logger.error(f"Checkout session carries invalid appointment id: {appointment_id}")
        return
    try:
        appointment = await Appointment.find_one(Appointment.id == ObjectId(appointment_id))
        if appointment is None:
            logger.error(f"Appointment {appointment_id} not found")
            return
        await appointment.mark_paid()
        logger.info(f"Payment for appointment {appointment_id} marked as successful")
    except Exception:
        logger.exception(f"Error updating payment status for appointment {appointment_id}")


# Mounted without the /api prefix; Stripe signs the raw request body
webhook_router = APIRouter()


@webhook_router.post("/webhook")
async def stripe_webhook(request: Request):
    payload = await request.body()
    signature = request.headers.get("stripe-signature")
    if not signature:
        raise HTTPException(status_code=400, detail="Webhook Error: missing stripe-signature header")

    try:
        stripe.Webhook.construct_event(payload, signature, config.STRIPE_WEBHOOK_SECRET)
        # Work on the verified payload as plain JSON
        event = json.loads(payload)
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.error(f"Webhook signature verification failed: {str(e)}")
        raise HTTPException(status_code=400, detail=f"Webhook Error: {str(e)}")

    event_type = event.get("type")
    logger.info(f"Received webhook event: {event_type}")

    if event_type == CHECKOUT_COMPLETED:
        session = event["data"]["object"]
        metadata = session.get("metadata") or {}
        logger.info(f"Checkout session completed: {session.get('id')}")
        await mark_appointment_paid(metadata.get("appointment_id"))
    else:
        logger.info(f"Unhandled event type {event_type}")

    return {"received": True}
