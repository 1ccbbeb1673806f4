from ttlstore.cli import main

main()
