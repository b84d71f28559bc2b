"""
Settings for Kog Shell.

Example:
    ```python
    from kog_shell.settings import KogShellConfig

    config = KogShellConfig.from_file("~/.kog/config.yaml")
    print(config.llm.model)
    ```
"""

from kog_shell.settings.config import KogShellConfig, LLMSettings

__all__ = ["KogShellConfig", "LLMSettings"]
