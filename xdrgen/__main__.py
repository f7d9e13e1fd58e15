from xdrgen.compiler.cli import main

raise SystemExit(main())
