"""Handles interactive/command-line mode for the JIPL interpreter. Uses cmd as backend."""

import cmd

from jipl.runtime.values import List, Number


class Shell(cmd.Cmd):
    """JIPL interpreter shell."""
    intro = "JIPL interpreter :: Python backend\nType 'help' for more information, 'exit' to leave."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    def onecmd(self, line):
        # cmd.Cmd would otherwise route `help x` and `exit` inside a multi-line entry to do_* methods
        if self._tmp_line and line != "EOF":
            return self.default(line)
        return super().onecmd(line)

    def default(self, line):
        """Executes arbitrary JIPL source."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            source, add_to_prev = self.sess.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = source
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            try:
                self.sess.add(source)
            except ValueError:
                return  # if line is empty, terminate

            self.sess.run()
            if self.sess.results:
                self.echo(self.sess.pop())

    def echo(self, result):
        """Prints the value of the last statement of result, unless it is null."""
        if isinstance(result, List) and result.elements and result.elements[-1] is not Number.NULL:
            print(result.elements[-1], file=self.stdout)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the JIPL interpreter!\n\n"
              "JIPL is a small scripting language with numbers, strings, lists, functions and \n"
              "objects. Statements are separated by newlines or ';'.\n\n"
              "Try it out by typing 'var square = function (x): x * x'. Next, try typing \n"
              "'square(7)', which gives 49. Entries with unclosed brackets continue on the \n"
              "next line.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
