from fastapi import HTTPException, status


class CatalogUnavailableException(HTTPException):
    def __init__(self, detail: str = "Exercise catalog is unavailable"):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
