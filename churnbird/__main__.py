from churnbird.main import main

main()
