from logship.core.use_cases.process_logs import LogsProcessor, Phase, RunState

__all__ = ["LogsProcessor", "Phase", "RunState"]
