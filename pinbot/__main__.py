from pinbot.launcher import main

main()
