from astrotime.cli import main

raise SystemExit(main())
