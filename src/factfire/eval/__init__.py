"""Term evaluation."""

from factfire.eval.term import Env, env_bind, eval_term, exec_term, is_true

__all__ = ["Env", "env_bind", "eval_term", "exec_term", "is_true"]
