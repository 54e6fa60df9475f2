"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from guidancehub.api.routes.user_routes import router as user_router
from guidancehub.api.routes.quiz_routes import router as quiz_router
from guidancehub.api.routes.career_routes import router as career_router
from guidancehub.api.routes.college_routes import router as college_router
from guidancehub.api.routes.review_routes import router as review_router
from guidancehub.api.routes.admission_event_routes import router as admission_event_router
from guidancehub.api.routes.application_routes import router as application_router
from guidancehub.api.routes.cutoff_routes import router as cutoff_router
from guidancehub.api.routes.notification_routes import router as notification_router
from guidancehub.api.routes.segmentation_routes import router as segmentation_router
from guidancehub.api.routes.analytics_routes import router as analytics_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(user_router)
api_router.include_router(quiz_router)
api_router.include_router(career_router)
api_router.include_router(college_router)
api_router.include_router(review_router)
api_router.include_router(admission_event_router)
api_router.include_router(application_router)
api_router.include_router(cutoff_router)
api_router.include_router(notification_router)
api_router.include_router(segmentation_router)
api_router.include_router(analytics_router)
