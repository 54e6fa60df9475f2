"""
Notification Routes

GET /notifications - My notifications (filter by read state / type)
PUT /notifications/read-all - Mark all my notifications as read
POST /notifications/admission-deadlines - Announce upcoming deadlines (admin only)
POST /notifications/application-updates - Announce application decisions (admin only)
GET /notifications/{notification_id} - Get a notification
PUT /notifications/{notification_id}/read - Mark as read
PUT /notifications/{notification_id}/dismiss - Dismiss
DELETE /notifications/{notification_id} - Delete
"""

from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Query

from guidancehub.core.auth import get_current_user, get_current_admin
from guidancehub.core.config import get_settings
from guidancehub.db.mongodb import get_collection, COLLECTIONS
from guidancehub.services.mongo_service import serialize_doc, serialize_docs, parse_object_id, paginate, page_meta
from guidancehub.services.notification_service import NotificationService, get_notification_service
from guidancehub.schemas.schemas import NotificationType, MessageResponse

router = APIRouter(prefix="/notifications", tags=["Notifications"])
settings = get_settings()


def _own_query(notification_id: str, user: dict) -> dict:
    return {"_id": parse_object_id(notification_id, "Notification not found"), "user": user["_id"]}


def _set_flag(notification_id: str, user: dict, flag: str) -> dict:
    notifications = get_collection(COLLECTIONS["notifications"])
    query = _own_query(notification_id, user)
    result = notifications.update_one(query, {"$set": {flag: True}})
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Notification not found")
    return serialize_doc(notifications.find_one(query))


@router.get("")
async def list_notifications(
    is_read: Optional[bool] = None,
    type: Optional[NotificationType] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    user: dict = Depends(get_current_user)
):
    """My notifications, most recently delivered first."""
    query = {"user": user["_id"]}
    if is_read is not None:
        query["is_read"] = is_read
    if type:
        query["type"] = type.value

    notifications, total = paginate(
        get_collection(COLLECTIONS["notifications"]), query, [("delivered_at", -1)], page, page_size
    )
    return {"notifications": serialize_docs(notifications), **page_meta(total, page, page_size)}


@router.put("/read-all", response_model=MessageResponse)
async def mark_all_read(user: dict = Depends(get_current_user)):
    result = get_collection(COLLECTIONS["notifications"]).update_many(
        {"user": user["_id"], "is_read": False},
        {"$set": {"is_read": True}}
    )
    return MessageResponse(message="All notifications marked as read", data={"updated": result.modified_count})


@router.post("/admission-deadlines")
async def send_admission_deadlines(
    admin: dict = Depends(get_current_admin),
    notifications: NotificationService = Depends(get_notification_service)
):
    sent = notifications.send_admission_deadlines(settings.deadline_notice_days)
    return {"message": f"Sent {sent} admission deadline notifications", "notifications_sent": sent}


@router.post("/application-updates")
async def send_application_updates(
    admin: dict = Depends(get_current_admin),
    notifications: NotificationService = Depends(get_notification_service)
):
    sent = notifications.send_application_updates(settings.status_notice_hours)
    return {"message": f"Sent {sent} application status notifications", "notifications_sent": sent}


@router.get("/{notification_id}")
async def get_notification(notification_id: str, user: dict = Depends(get_current_user)):
    notification = get_collection(COLLECTIONS["notifications"]).find_one(_own_query(notification_id, user))
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return serialize_doc(notification)


@router.put("/{notification_id}/read")
async def mark_read(notification_id: str, user: dict = Depends(get_current_user)):
    return _set_flag(notification_id, user, "is_read")


@router.put("/{notification_id}/dismiss")
async def dismiss(notification_id: str, user: dict = Depends(get_current_user)):
    return _set_flag(notification_id, user, "is_dismissed")


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(notification_id: str, user: dict = Depends(get_current_user)):
    result = get_collection(COLLECTIONS["notifications"]).delete_one(_own_query(notification_id, user))
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Notification not found")
    return MessageResponse(message="Notification removed")
