from enum import Enum

class MovieCategory(str, Enum):
    NOW_PLAYING = "now_playing"
    POPULAR = "popular"
    TOP_RATED = "top_rated"
    UPCOMING = "upcoming"


class RequestStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"
