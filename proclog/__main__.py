from proclog.run_logger import main

if __name__ == "__main__":
    raise SystemExit(main())
