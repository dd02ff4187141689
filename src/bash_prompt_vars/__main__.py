"""Entry point for python -m bash_prompt_vars."""

from .cli import main

if __name__ == "__main__":
    main()
