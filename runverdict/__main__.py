from runverdict.cli import main

raise SystemExit(main())
