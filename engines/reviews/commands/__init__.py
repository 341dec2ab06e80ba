"""
Handover Reviews Engine — Operations
======================================
"""

REVIEWS_REVIEW_SUBMIT = "reviews.review.submit"
REVIEWS_REVIEW_GET = "reviews.review.get"
