from .store import FileStepStore, InMemoryStepStore, StepRecord, StepStore

__all__ = ["StepStore", "StepRecord", "InMemoryStepStore", "FileStepStore"]
