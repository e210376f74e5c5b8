import yagmail
import logging
import config

logger = logging.getLogger(__name__)


def _send(to: str, subject: str, html_body: str):
    if not config.MAIL_USERNAME or not config.MAIL_PASSWORD:
        logger.info(f"Mail not configured, skipping '{subject}' to {to}")
        return
    try:
        yag = yagmail.SMTP(config.MAIL_USERNAME, config.MAIL_PASSWORD)
        yag.send(to=to, subject=subject, contents=[html_body])
    except Exception as e:
        # Notifications never fail the request that triggered them
        logger.error(f"Failed to send '{subject}' email to {to}: {str(e)}")


def send_appointment_update_email(email: str, subject: str, appointment):
    doctor_name = appointment.doc_data.get("full_name", "")
    patient_name = appointment.user_data.get("full_name", "")
    slot_date = appointment.slot_date.replace("_", "/")
    status = "Cancelled" if appointment.cancelled else "Booked"
    html_body = f"""
    <h1>{subject}</h1>
    <p>Appointment Details:</p>
    <p>Doctor: {doctor_name}</p>
    <p>Patient: {patient_name}</p>
    <p>Time: {slot_date}, {appointment.slot_time}</p>
    <p>Status: {status}</p>
    """
    _send(email, subject, html_body)
