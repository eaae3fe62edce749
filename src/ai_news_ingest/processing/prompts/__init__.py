from .editorial_prompt import SYSTEM_PROMPT, USER_PROMPT_TEMPLATE, build_user_prompt

__all__ = ["SYSTEM_PROMPT", "USER_PROMPT_TEMPLATE", "build_user_prompt"]
