from .badges import Badge, BadgeType
from .testimonials import Testimonial, TestimonialStatus
from .profile_views import ProfileView
from .events import WeeklyEvent
