from r2_roundtrip.cli import main

main()
