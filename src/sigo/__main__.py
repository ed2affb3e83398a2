from sigo.cli.main import main

raise SystemExit(main())
