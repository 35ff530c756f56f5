"""
블롭 파이프라인 오류 종류
==========================

모든 오류는 입력에서 결정론적으로 발생하며 일시적(transient)이지 않다.
따라서 재시도하지 않고 호출자에게 그대로 전달한다.

  - FieldOverflow: 32바이트 청크 값 ≥ 스칼라 필드 위수
  - DataTooLarge: pubdata가 블롭(또는 배치) 용량 초과
  - InvalidSetup: 신뢰 설정이 손상되었거나 크기가 맞지 않음 (시작 시 치명적)
  - BlobCountMismatch: 블롭별 산출물 수와 첨부된 블롭 수 불일치
  - SerializationError: 커밋먼트/증명/해시의 고정 크기 직렬화 실패

모든 값이 암호학적 바인딩으로 흘러가므로, 어떤 오류도 기본값(예: 0)으로
대체해서는 안 된다.
"""


class BlobPipelineError(ValueError):
    """파이프라인 오류의 기반 클래스.

    속성:
        blob_index: 오류가 발생한 블롭의 배치 내 위치 (알 수 없으면 None)
        element_index: 오류가 발생한 필드 원소 인덱스 (해당 없으면 None)
    """

    kind = "BlobPipelineError"

    def __init__(self, message, blob_index=None, element_index=None):
        super().__init__(message)
        self.message = message
        self.blob_index = blob_index
        self.element_index = element_index

    def with_blob_index(self, blob_index):
        """블롭 인덱스가 비어 있으면 채운다. 체이닝을 위해 self를 반환한다."""
        if self.blob_index is None:
            self.blob_index = blob_index
        return self

    def to_dict(self):
        return {
            "error": self.kind,
            "message": self.message,
            "blob_index": self.blob_index,
            "element_index": self.element_index,
        }

    def __str__(self):
        context = []
        if self.blob_index is not None:
            context.append(f"blob={self.blob_index}")
        if self.element_index is not None:
            context.append(f"element={self.element_index}")
        if context:
            return f"{self.message} ({', '.join(context)})"
        return self.message


class FieldOverflow(BlobPipelineError):
    kind = "FieldOverflow"


class DataTooLarge(BlobPipelineError):
    kind = "DataTooLarge"


class InvalidSetup(BlobPipelineError):
    kind = "InvalidSetup"


class BlobCountMismatch(BlobPipelineError):
    kind = "BlobCountMismatch"


class SerializationError(BlobPipelineError):
    kind = "SerializationError"
