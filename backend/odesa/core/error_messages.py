# odesa/core/error_messages.py
from fastapi import HTTPException, status


class ErrorResponses:
    TOKEN_REQUIRED = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Access token required",
        headers={"WWW-Authenticate": "Bearer"},
    )
    INVALID_TOKEN = HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Invalid or expired token",
    )
    ADMIN_ONLY = HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Admin access only",
    )
    USER_NOT_FOUND = HTTPException(status_code=404, detail="User not found")
    POSTCARD_NOT_FOUND = HTTPException(status_code=404, detail="Postcard not found")
    TEMPLATE_NOT_FOUND = HTTPException(status_code=404, detail="Template not found")
    ORDER_NOT_FOUND = HTTPException(status_code=404, detail="Order not found")
    EVENT_NOT_FOUND = HTTPException(status_code=404, detail="Event not found")
    LOCATION_NOT_FOUND = HTTPException(status_code=404, detail="Location not found")
    PLAN_NOT_FOUND = HTTPException(status_code=404, detail="Subscription plan not found")
