"""카탈로그 서비스 예외 정의"""


class CatalogError(Exception):
    """카탈로그 서비스 기본 예외"""
    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(CatalogError):
    """참조한 카테고리/속성/링크가 존재하지 않을 때"""
    status_code = 404


class InvalidArgumentError(CatalogError):
    """요청 파라미터 조합이 잘못되었을 때 (예: category_id 없이 exclude_category_id 사용)"""
    status_code = 400


class ConflictError(CatalogError):
    """현재 상태와 충돌하는 변경 요청 (예: 자식이 있는 카테고리 삭제)"""
    status_code = 409
