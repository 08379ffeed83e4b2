import sys

from .pipeline import main as run_main


def main() -> int:
    """
    Entry point for the publish-proof step.

    In GitHub Actions every input arrives through the environment
    (INPUT_API_KEY, GITHUB_WORKSPACE, GITHUB_OUTPUT, ...). Local runs can
    pass flags instead:

        python -m integrity_proof --workspace ./out --no-pdf
    """
    return run_main(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())
