from vidshelf.cli import main

raise SystemExit(main())
