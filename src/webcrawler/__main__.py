from webcrawler.cli import main

raise SystemExit(main())
