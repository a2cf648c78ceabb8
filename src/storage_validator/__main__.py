from storage_validator.cli import main

raise SystemExit(main())
