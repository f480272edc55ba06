# services/media/schemas/uploads.py
from shared.schemas import CamelModel


class UploadOut(CamelModel):
    message: str
    url: str
