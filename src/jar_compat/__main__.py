from jar_compat.cli import main

raise SystemExit(main())
