"""Run the kube-sync command line tool."""

from kube_sync.tool.kube_sync import main

if __name__ == "__main__":
    main()
