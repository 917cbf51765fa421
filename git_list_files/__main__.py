from git_list_files.cli import entrypoint

if __name__ == "__main__":
    entrypoint()
