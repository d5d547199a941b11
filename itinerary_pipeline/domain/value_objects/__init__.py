"""Domain value objects."""

from itinerary_pipeline.domain.value_objects.youtube_video_id import YouTubeVideoId

__all__ = ["YouTubeVideoId"]
