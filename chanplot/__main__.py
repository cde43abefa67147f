from chanplot.cli import main


raise SystemExit(main())
