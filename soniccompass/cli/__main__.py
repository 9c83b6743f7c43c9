"""Allow ``python -m soniccompass.cli`` execution."""

from soniccompass.cli.run import main

raise SystemExit(main())
