from logship.api.run_logs import run_logs

__all__ = ["run_logs"]
