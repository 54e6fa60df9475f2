"""
Notification Service

Creates notifications for users and runs the two dispatch jobs:
1. Admission deadlines - "Application Deadline" events starting soon are
   announced once to every user
2. Application updates - students hear about recent decisions on their
   applications (accepted, rejected, waitlisted, interview scheduled)
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from bson import ObjectId

from guidancehub.db.mongodb import get_collection, COLLECTIONS
from guidancehub.schemas.schemas import NotificationPriority

logger = logging.getLogger(__name__)

NOTIFIED_STATUSES = ["Accepted", "Rejected", "Waitlisted", "Interview Scheduled"]

STATUS_MESSAGES = {
    "Accepted": (
        "Application Accepted: {college}",
        "Congratulations! Your application for {program} at {college} has been accepted.",
    ),
    "Rejected": (
        "Application Update: {college}",
        "Your application for {program} at {college} has been rejected. "
        "Don't worry, there are other opportunities available.",
    ),
    "Waitlisted": (
        "Application Update: {college}",
        "Your application for {program} at {college} has been placed on the waitlist. "
        "We'll notify you of any updates.",
    ),
    "Interview Scheduled": (
        "Interview Scheduled: {college}",
        "Your interview for {program} at {college} has been scheduled. "
        "Check your application details for more information.",
    ),
}


class NotificationService:

    def __init__(self):
        self.collection = get_collection(COLLECTIONS["notifications"])
        self.users = get_collection(COLLECTIONS["users"])
        self.events = get_collection(COLLECTIONS["admission_events"])
        self.applications = get_collection(COLLECTIONS["applications"])
        self.colleges = get_collection(COLLECTIONS["colleges"])

    def create(
        self,
        user_id: ObjectId,
        type: str,
        title: str,
        message: str,
        priority: NotificationPriority = NotificationPriority.medium,
        related_entity: Optional[dict] = None,
        action_links: Optional[List[dict]] = None,
    ) -> dict:
        now = datetime.utcnow()
        doc = {
            "user": user_id,
            "type": type,
            "title": title,
            "message": message,
            "priority": NotificationPriority(priority).value,
            "related_entity": related_entity,
            "is_read": False,
            "is_dismissed": False,
            "scheduled_at": now,
            "delivered_at": now,
            "expires_at": None,
            "action_links": action_links or [],
            "created_at": now,
        }
        doc["_id"] = self.collection.insert_one(doc).inserted_id
        return doc

    def _college_name(self, college_id: ObjectId) -> str:
        college = self.colleges.find_one({"_id": college_id}, {"name": 1})
        return college["name"] if college else "Unknown college"

    def send_admission_deadlines(self, days: int = 7) -> int:
        """Announce deadlines within `days` to every user not yet told. Returns count sent."""
        now = datetime.utcnow()
        events = list(self.events.find({
            "is_active": True,
            "event_type": "Application Deadline",
            "start_date": {"$gte": now, "$lte": now + timedelta(days=days)},
        }))

        sent = 0
        user_ids = [user["_id"] for user in self.users.find({}, {"_id": 1})]
        for event in events:
            college_name = self._college_name(event["college"])
            for user_id in user_ids:
                already_sent = self.collection.find_one({
                    "user": user_id,
                    "type": "Application Deadline",
                    "related_entity.id": event["_id"],
                })
                if already_sent:
                    continue

                self.create(
                    user_id,
                    type="Application Deadline",
                    title=f"Application Deadline: {college_name}",
                    message=(
                        f"The application deadline for {college_name} - "
                        f"{event.get('program') or 'various programs'} is approaching on "
                        f"{event['start_date']:%Y-%m-%d}."
                    ),
                    priority=NotificationPriority.high,
                    related_entity={"type": "AdmissionEvent", "id": event["_id"]},
                    action_links=[{"label": "View Details", "url": f"/colleges/{event['college']}"}],
                )
                sent += 1

        logger.info("Sent %d admission deadline notifications", sent)
        return sent

    def send_application_updates(self, hours: int = 24) -> int:
        """Notify students about decisions made in the last `hours`. Returns count sent."""
        since = datetime.utcnow() - timedelta(hours=hours)
        applications = self.applications.find({
            "updated_at": {"$gte": since},
            "status": {"$in": NOTIFIED_STATUSES},
        })

        sent = 0
        for application in applications:
            title, message = STATUS_MESSAGES[application["status"]]
            context = {
                "college": self._college_name(application["college"]),
                "program": application.get("program"),
            }
            notification_type = (
                "Interview Scheduled" if application["status"] == "Interview Scheduled" else "General"
            )
            self.create(
                application["student"],
                type=notification_type,
                title=title.format(**context),
                message=message.format(**context),
                priority=(
                    NotificationPriority.urgent if application["status"] == "Accepted" else NotificationPriority.high
                ),
                related_entity={"type": "Application", "id": application["_id"]},
                action_links=[{"label": "View Application", "url": f"/applications/{application['_id']}"}],
            )
            sent += 1

        logger.info("Sent %d application status notifications", sent)
        return sent


def get_notification_service() -> NotificationService:
    return NotificationService()
