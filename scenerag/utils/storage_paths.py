"""Object storage layout for per-scene media."""

from typing import List


def scene_clip_path(video_id: str, scene_number: int) -> str:
    return f"scenes/{video_id}/scene_{scene_number:03d}.mp4"


def scene_thumbnail_path(video_id: str, scene_number: int) -> str:
    return f"thumbnails/{video_id}/scene_{scene_number:03d}.jpg"


def video_prefixes(video_id: str) -> List[str]:
    """Every prefix holding media derived from one video."""
    return [f"audio/{video_id}/", f"scenes/{video_id}/", f"thumbnails/{video_id}/"]
